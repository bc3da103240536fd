# retail_pos/constants.py
APP_NAME = "Retail POS"

DATA_DIR_ENV = "RETAIL_POS_DATA_DIR"
DEFAULT_DATA_DIR = ".retail_pos"
DB_FILE_NAME = "pdv-database.db"
IMAGES_DIR = "product-images"
RECEIPTS_DIR = "receipts"
LOGS_DIR = "logs"
LOG_FILE_NAME = "retail_pos.log"
ACTIVATION_FILE_NAME = "activation.json"

TABLE_SCHEMA_VERSION = "schema_version"
SCHEMA_VERSION = "3"

# Sale statuses
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"

# Receipt paper widths in millimetres
RECEIPT_WIDTHS = (58, 80)
DEFAULT_RECEIPT_WIDTH = 80

# Stock bands shown in the catalog
LOW_STOCK_THRESHOLD = 5
MEDIUM_STOCK_THRESHOLD = 20

TOP_PRODUCTS_LIMIT = 5

ACTIVATION_SECRET_ENV = "RETAIL_POS_ACTIVATION_SECRET"
DEFAULT_ACTIVATION_SECRET = "SEGREDO_DO_SISTEMA"

LOG_LEVEL_ENV = "RETAIL_POS_LOG_LEVEL"
