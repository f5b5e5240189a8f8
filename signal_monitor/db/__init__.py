from .watchlist_db import WatchlistDB
from .signal_db import SignalDB
from .service_logs import ServiceLogDB, SQLiteLoggingHandler

__all__ = ["WatchlistDB", "SignalDB", "ServiceLogDB", "SQLiteLoggingHandler"]
