"""Locating record lists in unpredictable response shapes."""

from filament_atlas.extract.decode import find_record_list

RECORDS = [{"name": "Red", "hex": "#f00"}, {"name": "Blue", "hex": "#00f"}]


def test_wrapped_plain_and_mapped_shapes_agree():
    keyed = find_record_list({"data": RECORDS})
    plain = find_record_list(RECORDS)
    mapped = find_record_list({"0": RECORDS[0], "1": RECORDS[1]})
    assert keyed.records == plain.records == mapped.records == RECORDS
    assert (keyed.source, plain.source, mapped.source) == ("key:data", "array", "values")


def test_container_keys_checked_in_order():
    result = find_record_list({"data": "nope", "items": [1], "products": RECORDS})
    assert result.source == "key:products"
    assert result.records == RECORDS


def test_not_found_cases():
    for payload in ({"foo": "bar"}, {}, None, 42, {"0": {"price": 3}}, {"0": "x"}):
        result = find_record_list(payload)
        assert not result.found
        assert result.source == "not-found"


def test_empty_array_is_found_but_empty():
    result = find_record_list([])
    assert result.found
    assert result.records == []


def test_text_payload_is_parsed_after_leading_noise():
    text = '<b>Warning</b>: deprecated in x.php\n{"items": [{"hex": "#fff"}]}'
    result = find_record_list(text)
    assert result.records == [{"hex": "#fff"}]


def test_unparseable_text_is_not_found():
    assert not find_record_list("<html>maintenance</html>").found
