"""
Card-on-shipment payment records.

`repository` owns the SQL, `service` validates and orchestrates the writes,
`router` exposes them over HTTP.
"""
