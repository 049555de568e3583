"""
Centralized configuration — env vars, region ordering, display constants.
"""
import os


# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'text')

# ── Redis (circuit breaker state) ─────────────────────────────────────────────
REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

# ── PostgreSQL ────────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///local.db')
DB_POOL_SIZE = int(os.getenv('DB_POOL_SIZE', '5'))
DB_CONNECT_TIMEOUT = int(os.getenv('DB_CONNECT_TIMEOUT', '5'))
DB_STATEMENT_TIMEOUT_MS = int(os.getenv('DB_STATEMENT_TIMEOUT_MS', '10000'))

# ── Flask ─────────────────────────────────────────────────────────────────────
SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-change-me')

# ── Benchmark window ──────────────────────────────────────────────────────────
WINDOW_DAYS = int(os.getenv('WINDOW_DAYS', '30'))

# ── Circuit breaker for the benchmark store ──────────────────────────────────
BREAKER_NAME = 'benchmark_db'
BREAKER_FAILURE_THRESHOLD = int(os.getenv('BREAKER_FAILURE_THRESHOLD', '3'))
BREAKER_RESET_TIMEOUT = int(os.getenv('BREAKER_RESET_TIMEOUT', '60'))

# ── Filter vocabularies ───────────────────────────────────────────────────────
QUERY_TYPES = ('cold', 'hot')
CONNECTION_METHODS = ('http', 'ws', 'tcp')
CONNECTION_FILTERS = CONNECTION_METHODS + ('all',)
QUERY_TYPE_FILTERS = ('cold', 'hot', 'both')
REGION_FILTERS = ('matching', 'all')

DEFAULT_CONNECTION_FILTER = 'http'
DEFAULT_QUERY_TYPE_FILTER = 'hot'
DEFAULT_REGION_FILTER = 'matching'

CONNECTION_LABELS = {
    'http': '@neondatabase/serverless HTTP',
    'ws': '@neondatabase/serverless WebSocket',
    'tcp': 'pg TCP',
}

PROVIDER_LABELS = {
    'neon': 'Neon Postgres',
}

# ── Latency bands (ms, strictly greater than) ────────────────────────────────
LATENCY_BANDS = {
    'cold': (('critical', 1000), ('slow', 500), ('moderate', 200)),
    'hot': (('critical', 500), ('slow', 250), ('moderate', 100)),
}

# ── Canonical AWS region ordering for table columns and rows ─────────────────
REGION_ORDER = [
    # Europe
    ('eu-central-1', 'Europe Central 1'),    # Frankfurt (fra1)
    ('eu-west-2', 'Europe West 2'),          # London (lhr1)
    ('eu-west-3', 'Europe West 3'),          # Paris (cdg1)
    ('eu-north-1', 'Europe North 1'),        # Stockholm (arn1)
    ('eu-west-1', 'Europe West 1'),          # Dublin (dub1)
    # US East
    ('us-east-1', 'US East 1'),              # Washington DC (iad1)
    ('us-east-2', 'US East 2'),              # Columbus (cle1)
    # US West
    ('us-west-1', 'US West 1'),              # San Francisco (sfo1)
    ('us-west-2', 'US West 2'),              # Portland (pdx1)
    # Asia East
    ('ap-east-1', 'Asia East 1'),            # Hong Kong (hkg1)
    ('ap-northeast-2', 'Asia Northeast 2'),  # Seoul (icn1)
    ('ap-northeast-1', 'Asia Northeast 1'),  # Tokyo (hnd1)
    ('ap-northeast-3', 'Asia Northeast 3'),  # Osaka (kix1)
    # Asia South/Southeast
    ('ap-southeast-1', 'Asia Southeast 1'),  # Singapore (sin1)
    ('ap-southeast-2', 'Asia Southeast 2'),  # Sydney (syd1)
    ('ap-south-1', 'Asia South 1'),          # Mumbai (bom1)
    # Middle East & Africa
    ('me-south-1', 'Middle East 1'),         # Dubai (dxb1)
    ('af-south-1', 'Africa South 1'),        # Cape Town (cpt1)
    # South America
    ('sa-east-1', 'South America East 1'),   # São Paulo (gru1)
]

# ── FAQ ───────────────────────────────────────────────────────────────────────
FAQ = [
    {
        'question': 'What does this benchmark measure?',
        'answer': (
            'The roundtrip time for a simple SELECT query issued from a '
            'serverless function to a database, across regions. It compares '
            'HTTP and WebSocket connections via the Neon serverless driver '
            'with classic TCP connections via the pg library.'
        ),
    },
    {
        'question': 'What is the difference between cold and hot queries?',
        'answer': (
            'A cold query is the first query against a scaled-to-zero '
            'database and includes its startup time. A hot query runs while '
            'the database is already active.'
        ),
    },
    {
        'question': "What's the difference between HTTP and WebSocket connections?",
        'answer': (
            'HTTP is stateless and fastest for single-shot queries. '
            'WebSocket connections need more roundtrips to establish but are '
            'more efficient for several queries over one connection.'
        ),
    },
    {
        'question': 'Why does the region matter?',
        'answer': (
            'Network distance dominates latency. Deploying functions in the '
            'same region as the database is recommended; the table highlights '
            'those pairs and hides other function regions by default.'
        ),
    },
    {
        'question': 'How are the numbers computed?',
        'answer': (
            'Each table cell is the average latency over the last 30 days. '
            'Cells without measurements show N/A rather than zero.'
        ),
    },
]
