# backend/tests/test_storage_paths.py
from __future__ import annotations

from rentals.domain.storage_paths import build_object_path, extract_storage_path, file_extension, sanitize_name


def test_extract_path_from_signed_url():
    url = "https://abc.supabase.co/storage/v1/object/sign/properties-restricted-docs/P1/property/legal/doc_1.pdf?token=xyz"
    assert extract_storage_path(url) == "P1/property/legal/doc_1.pdf"


def test_extract_path_from_public_url_is_unquoted():
    url = "https://abc.supabase.co/storage/v1/object/public/properties-public-docs/P1/gallery/foto%20sal%C3%B3n_1.jpg"
    assert extract_storage_path(url) == "P1/gallery/foto salón_1.jpg"


def test_extract_path_from_relative_url():
    assert extract_storage_path("/storage/v1/object/sign/b/L1/identity/x.pdf?token=t") == "L1/identity/x.pdf"


def test_extract_path_rejects_other_urls():
    assert extract_storage_path(None) is None
    assert extract_storage_path("") is None
    assert extract_storage_path("https://example.com/files/a.pdf") is None


def test_build_object_path():
    path = build_object_path("P1", "property/legal/custom", "custom_legal_documents", "Escritura final.PDF", now_ms=1700000000000)
    assert path == "P1/property/legal/custom/custom_legal_documents_1700000000000.PDF"


def test_sanitize_and_extension():
    assert sanitize_name("Saldo en cuenta bancaria") == "Saldo_en_cuenta_bancaria"
    assert sanitize_name("Fondo de inversión / ahorro") == "Fondo_de_inversi_n___ahorro"
    assert file_extension("a.tar.gz") == "gz"
    assert file_extension("noext") == ""
