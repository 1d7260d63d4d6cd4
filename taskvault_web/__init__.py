"""
HTTP layer for TaskVault.

Routers:
- taskvault_web.auth_routes.router  (/api/auth)
- taskvault_web.todo_routes.router  (/api/todos)

taskvault_web.main.create_app() mounts both.
"""
