"""Server-rendered account settings page.

- served by the Core FastAPI service
- plain HTML forms + redirects, no client-side runtime
- auth: the session cookie issued by the identity provider
"""
