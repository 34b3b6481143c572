"""Reserved column names shared by every document storage table."""

ID_COLUMN = "id"
DATA_COLUMN = "data"
LAST_MODIFIED_COLUMN = "mt_last_modified"
VERSION_COLUMN = "mt_version"
PYTHON_TYPE_COLUMN = "mt_python_type"
DOCUMENT_TYPE_COLUMN = "mt_doc_type"

RESERVED_COLUMNS = frozenset(
    {
        ID_COLUMN,
        DATA_COLUMN,
        LAST_MODIFIED_COLUMN,
        VERSION_COLUMN,
        PYTHON_TYPE_COLUMN,
        DOCUMENT_TYPE_COLUMN,
    }
)

# Discriminator value stored for rows of the hierarchy root type.
BASE_DOCUMENT_TYPE = "BASE"
