from videos.languages import (
    compare_language_priority, extract_language_from_url, get_language_name, get_language_priority,
    language_sort_key, normalize_language_code,
)


def test_normalize_language_code():
    assert normalize_language_code("es_419") == "es-419"
    assert normalize_language_code("EN-US") == "en-US"
    assert normalize_language_code("fr") == "fr"
    assert normalize_language_code(None) == "und"
    assert normalize_language_code("") == "und"


def test_language_names():
    assert get_language_name("en") == "English"
    assert get_language_name("pt_BR") == "Portuguese (Brazil)"
    assert get_language_name("xx") == "XX"
    assert get_language_name(None) == "Unknown"


def test_extract_language_from_url():
    assert extract_language_from_url("https://host.test/videoplayback?itag=140&lang=de&x=1") == "de"
    assert extract_language_from_url("https://host.test/videoplayback?xtags=lang%3Dfr") == "fr"
    assert extract_language_from_url("https://host.test/videoplayback?itag=140") is None
    assert extract_language_from_url(None) is None


def test_language_priority():
    assert get_language_priority("und") == 0
    assert get_language_priority("original") == 0
    assert get_language_priority("en") == 1
    assert get_language_priority("fr") == 2


def test_language_ordering():
    assert sorted(["fr", "en", "und", "de"], key=language_sort_key) == ["und", "en", "de", "fr"]
    assert compare_language_priority("en", "fr") == -1
    assert compare_language_priority("fr", "en") == 1
    assert compare_language_priority("de", "de") == 0
