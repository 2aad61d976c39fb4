from .search import Job, SearchConfig, SearchStats, Share, search
from .events import EventLog, RecordingEventLog, logging_event_log
from .providers import executor_hash_fn, hashlib_hash_fn, hex_hash_fn
