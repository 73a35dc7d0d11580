# Repositories package.
#
# Store adapters that own all SQL for one table.  They accept the
# request-scoped AsyncSession at construction and raise the StoreError
# family from app.exceptions instead of SQLAlchemy exceptions.
