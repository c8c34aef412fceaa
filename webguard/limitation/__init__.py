"""Fixed-window rate limiting backed by Redis, with status reports and middleware."""