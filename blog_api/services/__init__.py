# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# business logic and database access for a single domain aggregate:
#
#   user_service     — registration, login, lookup for User
#   post_service     — CRUD + pagination for Post, owner-only mutation
#   comment_service  — comments on a Post, owner-only deletion
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency.  Failures are raised as the typed errors in
# ``blog_api.errors``.
