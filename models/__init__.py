"""
Models package. `storage` is the process-wide DBStorage; create_app() points it
at the configured database with storage.reload(url).
"""
from models.db_storage import DBStorage

storage = DBStorage()
