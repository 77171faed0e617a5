"""
Process-wide plumbing: the two database stores and logging setup.
"""
