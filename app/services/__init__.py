# Services package.
#
#   post_service  - create / read / page / update / delete for Post
#
# PostService is built per request around a PostRepository bound to the
# request's AsyncSession (see app.dependencies.get_post_service), so the
# router layer controls the transaction boundary via ``get_db``.
