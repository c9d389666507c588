from datetime import date

# --- Observation window ---
OBSERVATION_START_DATE = date(2020, 1, 1)
EXTENDED_PERIOD_YEARS = 5

# --- Column names ---
CUSTOMER_ID_COLUMN = "customer_id"
CUSTOMER_NAME_COLUMN = "customer_name"
INDUSTRY_COLUMN = "industry"
COUNTRY_COLUMN = "country"
PLAN_COLUMN = "plan"
CONTRACT_START_DATE_COLUMN = "contract_start_date"
CONTRACT_END_DATE_COLUMN = "contract_end_date"
CHURN_DATE_COLUMN = "churn_date"
CHURN_REASON_COLUMN = "churn_reason"
CHANNEL_COLUMN = "channel"
YEAR_COLUMN = "year"
WEEK_COLUMN = "week"
ACTIVITY_COUNT_COLUMN = "activity_count"

# --- Attribute catalogs ---
# Catalog sizes are distinct primes (11, 7, 3) so cycling by index never aligns.
INDUSTRY_VALUES = (
    "Technology", "Finance", "Healthcare", "Manufacturing", "Retail", "Energy",
    "Transportation", "Telecom", "Entertainment", "Education", "Social Media",
)
COUNTRY_VALUES = (
    "United States", "United Kingdom", "Germany", "France", "Italy", "Greece", "Turkey",
)
PLAN_VALUES = ("Basic", "Pro", "Enterprise")

# Channel -> popularity (probability that a customer is active on the channel)
CHANNEL_POPULARITY = {
    "Facebook": 0.4,
    "Instagram": 0.3,
    "Twitter": 0.2,
    "LinkedIn": 0.05,
    "YouTube": 0.05,
}
CHANNEL_VALUES = tuple(CHANNEL_POPULARITY)

ACTIVITY_DROP_REASON = "Activity drop"
CHURN_REASON_VALUES = (ACTIVITY_DROP_REASON,)

# --- Lifecycle generation ---
DEFAULT_NUMBER_OF_CUSTOMERS = 1000
DEFAULT_PERCENT_LEFT_CENSORED = 0.0
DEFAULT_PERCENT_RIGHT_CENSORED = 0.0
DEFAULT_OBSERVATION_PERIOD_YEARS = 10
DEFAULT_CHURN_PROBABILITY = 0.5
DEFAULT_FULL_LIFETIME = False
# Churn is placed between 20% and 80% of the observable contract overlap
EARLIEST_POSSIBLE_CHURN = 0.2
LATEST_POSSIBLE_CHURN = 0.8
MIN_DURATION_FOR_CHURN_DAYS = 360

# --- Activity generation ---
DEFAULT_DISTRIBUTION_KIND = "lognormal"
DEFAULT_CHURN_ACTIVITY_FACTOR = 0.1
FALLBACK_MEAN_MIN = 1.0
FALLBACK_MEAN_MAX = 100.0
FALLBACK_STD_RATIO = 0.3
FALLBACK_MIN_STD = 0.1
FALLBACK_MIN_FREQUENCY = 0.05

# --- Signal cleaning ---
DEFAULT_SIGNAL_CLEANING = "none"
DEFAULT_MOVING_AVERAGE_WINDOW = 5
MAD_NORMAL_SCALE = 0.6745

# --- CUSUM ---
DEFAULT_CUSUM_SMOOTHING = 0.16
DEFAULT_CUSUM_REFERENCE = 200.0
DEFAULT_CUSUM_STD_DEV = 20.0
DEFAULT_CUSUM_THRESHOLD_K = 5.0
DEFAULT_CUSUM_THRESHOLD = DEFAULT_CUSUM_REFERENCE + DEFAULT_CUSUM_THRESHOLD_K * DEFAULT_CUSUM_STD_DEV
DEFAULT_CUSUM_IGNORE_ZERO_VALUES = True

# --- Misc ---
DEFAULT_RANDOM_STATE = 42
DEFAULT_VERBOSE = False
EPSILON_FLOAT = 1e-12
