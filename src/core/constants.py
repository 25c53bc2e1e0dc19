"""Core constants used across Silverline modules.

This module centralizes storage names, fallback sentinels, and fixed
offsets used by the transform rules. Keeping values here avoids magic
literals in business logic.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

DEFAULT_DATA_ROOT = Path(".silverline")
LAYERS_DIR_NAME = "layers"
VERSIONS_DIR_NAME = "versions"
TABLES_DIR_NAME = "tables"
SHADOW_DIR_PREFIX = ".shadow-"
CATALOG_FILE_NAME = "catalog.json"
MANIFEST_FILE_NAME = "manifest.json"
REJECTED_FILE_NAME = "rejected.jsonl"
AUDITS_DIR_NAME = "audits"
AUDIT_REPORT_SUFFIX = ".json"
TABLE_FILE_SUFFIX = ".jsonl"
LANCE_DIR_SUFFIX = ".lance"
HASH_ALGORITHM = "sha256"

BRONZE_LAYER = "bronze"
SILVER_LAYER = "silver"
SUPPORTED_LAYERS = (BRONZE_LAYER, SILVER_LAYER)

LOAD_TIMESTAMP_COLUMN = "loaded_at"
SOURCE_ROW_COLUMN = "source_row"
NOT_AVAILABLE = "n/a"

PRODUCT_CATEGORY_PREFIX_LENGTH = 5
PRODUCT_KEY_SUFFIX_OFFSET = 6
PRODUCT_KEY_SEPARATOR = "-"
CATEGORY_ID_SEPARATOR = "_"
DEFAULT_PRODUCT_COST = 0

DEMOGRAPHIC_ID_PREFIX = "NAS"

INTEGER_DATE_DIGITS = 8
MIN_INTEGER_DATE = 19000101
MAX_INTEGER_DATE = 20500101
MIN_BIRTH_DATE = date(1924, 1, 1)
MIN_STORED_INTEGER = -(2**63)
MAX_STORED_INTEGER = 2**63 - 1

DEFAULT_SOURCE_LAYOUT = {
    "crm_cust_info": "source_crm/cust_info.csv",
    "crm_prd_info": "source_crm/prd_info.csv",
    "crm_sales_details": "source_crm/sales_details.csv",
    "erp_cust_az12": "source_erp/CUST_AZ12.csv",
    "erp_loc_a101": "source_erp/LOC_A101.csv",
    "erp_px_cat_g1v2": "source_erp/PX_CAT_G1V2.csv",
}
