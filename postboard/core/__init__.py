"""
Shared, cross-cutting code for the service.

`core/` should contain small building blocks that multiple features use
(DB wiring, settings, logging, error mapping). Keep feature-specific SQL in
the corresponding feature package (e.g. `users/`, `posts/`).
"""
