"""
Costanti per l'analisi range e il matching dei modelli catalogo.
"""

# Full-name matching
MIN_NORMALIZED_NAME_LENGTH = 3
"""Il nome normalizzato (senza spazi/trattini) deve superare questa lunghezza."""

MIN_LOWER_NAME_LENGTH = 4
"""Il nome lowercase (spazi mantenuti) deve superare questa lunghezza."""

# Analysis output
LINE_PREVIEW_SUFFIX = "..."
"""Suffisso aggiunto ai testi riga troncati nei risultati."""

# Device catalog import
DEVICE_NAME_PREFIXES_TO_STRIP = ("For ",)
"""Prefissi rimossi dai nomi modello provenienti da categorie accessori."""

KNOWN_DEVICE_BRANDS = (
    "Apple", "Samsung", "Google", "Motorola", "LG", "OnePlus", "Xiaomi",
    "Huawei", "Sony", "Nokia", "HTC", "BlackBerry", "ASUS", "Lenovo",
    "Amazon", "Microsoft", "Acer", "Alcatel", "ZTE", "BLU", "TCL",
    "Oppo", "Vivo", "Realme", "Honor", "Nothing", "Essential", "Razer",
    "CAT", "Kyocera", "Palm", "HP", "Dell", "Toshiba", "Panasonic",
)
"""Brand riconosciuti a inizio nome modello telefono/tablet."""
