"""
Default configuration for the timeline generator.
Values here are used whenever config.toml is missing or omits a key.
"""

# ============================================================================
# ENTITY SPACE
# ============================================================================

NODES = 10
QUERIES = 10
METRICS = 10

# ============================================================================
# SIMULATION
# ============================================================================

HOURS = 3000  # simulated hours (~125 days)
DISRUPTIONS = 50  # number of disruption draws
THREADS = 2  # concurrent bulk dispatches
RANDOM_SEED = None  # None = fresh entropy every run

# Timeline origin, every record is offset from here by its hour
START_TIMESTAMP = "2015-10-20T00:00:00"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"

# ============================================================================
# DISRUPTIONS
# ============================================================================

# Disruptions start after a warm-up period and end before the last day
DISRUPTION_EARLIEST_START = 48  # hours
DISRUPTION_TAIL_MARGIN = 24  # hours kept free at the end of the timeline
DISRUPTION_MIN_DURATION = 2  # hours (inclusive)
DISRUPTION_MAX_DURATION = 24  # hours (exclusive)

# Disruption codes carried by every record
DISRUPTION_NONE = 0
DISRUPTION_NODE = 1
DISRUPTION_QUERY = 2
DISRUPTION_METRIC = 3

# ============================================================================
# DISTRIBUTIONS
# ============================================================================

# Regular regime: mean in [min, max), std in [min, max)
REGULAR_MIN_MEAN = 20
REGULAR_MAX_MEAN = 40
REGULAR_MIN_STD = 1
REGULAR_MAX_STD = 10

# Disrupted regime
DISRUPTED_MIN_MEAN = 60
DISRUPTED_MAX_MEAN = 200
DISRUPTED_MIN_STD = 20
DISRUPTED_MAX_STD = 100

# ============================================================================
# SAMPLE PRODUCER
# ============================================================================

BUFFER_CAPACITY = 32768  # buffered standard normals
SAMPLE_CHUNK_SIZE = 1024  # normals drawn per numpy call
PRODUCER_BACKOFF = 0.05  # seconds to wait when the buffer is full
SAMPLE_POLL_INTERVAL = 0.1  # seconds between liveness checks on an empty buffer

# ============================================================================
# DISPATCH
# ============================================================================

BULK_SIZE = 10000  # records per batch

# ============================================================================
# OUTPUT
# ============================================================================

CONFIG_PATH = "config.toml"
SINK_URL = "http://localhost:9200"
INDEX_NAME = "data"
SINK_TIMEOUT = 30.0  # seconds per bulk request

OUTPUT_DIR = "outputs"
JSON_OUTPUT_PATH = "output.json"
REPORT_DIR = f"{OUTPUT_DIR}/reports"
PLOT_DIR = f"{OUTPUT_DIR}/plots"

# Wire fields of a record, in output order
RECORD_FIELDS = [
    "node",
    "metric",
    "query",
    "hour",
    "value",
    "disruption",
]

# Percentiles reported per disruption code / metric
REPORT_PERCENTILES = [0.5, 0.9]
