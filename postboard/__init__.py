"""
postboard: users/posts HTTP service over PostgreSQL.
"""
