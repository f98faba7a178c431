# database/repositories/__init__.py
