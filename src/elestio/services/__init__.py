"""
Elestio SDK services.

Client-side logic layered over the API wrappers: deployment polling and
size resolution.
"""
