import os
from dotenv import load_dotenv

load_dotenv(dotenv_path=".env")

# Supabase (read by infra.supabase.client)
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

# Realtime channel and durable table
TIMER_CHANNEL = os.getenv("TIMER_CHANNEL", "timer-sync")
TIMER_BROADCAST_EVENT = "timer-update"
TIMER_TABLE = os.getenv("TIMER_TABLE", "timers")

# Tick coordination
TICK_INTERVAL_SECONDS = float(os.getenv("TICK_INTERVAL_SECONDS", "1.0"))
LEADER_GRACE_WINDOW_TICKS = int(os.getenv("LEADER_GRACE_WINDOW_TICKS", "2"))
PERSIST_EVERY_N_TICKS = int(os.getenv("PERSIST_EVERY_N_TICKS", "5"))
# Max timestamp difference (ms) for a broadcast to count as our own echo
SELF_ECHO_DEADBAND_MS = int(os.getenv("SELF_ECHO_DEADBAND_MS", "50"))

# Timers created without an explicit duration / name
DEFAULT_DURATION_SECONDS = int(os.getenv("DEFAULT_DURATION_SECONDS", str(5 * 60)))
DEFAULT_TIMER_LABEL = os.getenv("DEFAULT_TIMER_LABEL", "Speaker")

# Local fallback cache
LOCAL_CACHE_PATH = os.getenv("LOCAL_CACHE_PATH", ".timersync/timers.json")
