# items/services/import_columns.py

"""
SPREADSHEET COLUMN ALIASES (IMPORT BOUNDARY ONLY)

Declarative mapping: canonical field -> header names seen in lab inventory
spreadsheets (English, Turkish, and the camelCase keys older clients send).

Matching is case-insensitive and ignores surrounding whitespace.
Unknown headers are ignored. The core never sees aliases; import_items()
normalizes every row through normalize_row() first.
"""

from __future__ import annotations

COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "code": ("code", "item code", "malzeme kodu", "kod", "stok kodu"),
    "name": ("name", "item name", "malzeme adı", "malzeme adi", "ürün adı", "urun adi"),
    "category": ("category", "kategori"),
    "department": ("department", "departman", "bölüm", "bolum"),
    "unit": ("unit", "birim"),
    "min_stock": ("min_stock", "minstock", "min stock", "min stok", "minimum stok"),
    "ideal_stock": ("ideal_stock", "idealstock", "ideal stock", "ideal stok"),
    "max_stock": ("max_stock", "maxstock", "max stock", "max stok", "maksimum stok"),
    "supplier": ("supplier", "tedarikçi", "tedarikci", "firma"),
    "catalog_no": ("catalog_no", "catalogno", "catalog no", "katalog no", "katalog numarası"),
    "brand": ("brand", "marka"),
    "storage_location": ("storage_location", "storagelocation", "location", "konum", "depo"),
    "storage_temp": (
        "storage_temp",
        "storagetemp",
        "storage temperature",
        "saklama sıcaklığı",
        "saklama sicakligi",
    ),
    "chemical_type": ("chemical_type", "chemicaltype", "chemical type", "kimyasal tipi"),
    "msds_url": ("msds_url", "msdsurl", "msds", "sds", "msds/sds"),
    "notes": ("notes", "notlar", "açıklama", "aciklama"),
    # lot columns
    "lot_number": ("lot_number", "lotnumber", "lotno", "lot no", "lot", "lot numarası"),
    "quantity": (
        "quantity",
        "initialstock",
        "initial_stock",
        "stock",
        "mevcut stok",
        "miktar",
        "adet",
    ),
    "expiry_date": ("expiry_date", "expirydate", "expiry", "son kullanma", "skt", "son kullanma tarihi"),
    "received_date": ("received_date", "receiveddate", "received", "giriş tarihi", "giris tarihi"),
}

ITEM_FIELDS = (
    "code",
    "name",
    "category",
    "department",
    "unit",
    "min_stock",
    "ideal_stock",
    "max_stock",
    "supplier",
    "catalog_no",
    "brand",
    "storage_location",
    "storage_temp",
    "chemical_type",
    "msds_url",
    "notes",
)

LOT_FIELDS = ("lot_number", "quantity", "expiry_date", "received_date")


def _key(header) -> str:
    return " ".join(str(header).strip().lower().split())


_ALIAS_LOOKUP: dict[str, str] = {
    _key(alias): canonical
    for canonical, aliases in COLUMN_ALIASES.items()
    for alias in aliases
}


def canonical_field(header) -> str | None:
    return _ALIAS_LOOKUP.get(_key(header))


def normalize_row(raw: dict) -> dict:
    """
    Map one raw row onto canonical field names.
    The first non-empty value wins when several headers map to one field.
    """
    row: dict = {}
    for header, value in (raw or {}).items():
        field = canonical_field(header)
        if field is None:
            continue
        if isinstance(value, str):
            value = value.strip()
        if value in (None, ""):
            continue
        row.setdefault(field, value)
    return row
