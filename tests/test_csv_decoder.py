from core.csv_decoder import decode, split_line


def test_decode_maps_rows_onto_header():
    text = "Title,Source,Reach\nAcme launch,Daily Planet,100\nAcme award,Reuters,2000"

    rows = decode(text)

    assert rows == [
        {"Title": "Acme launch", "Source": "Daily Planet", "Reach": "100"},
        {"Title": "Acme award", "Source": "Reuters", "Reach": "2000"},
    ]


def test_quoted_fields_keep_their_commas():
    text = 'Title,Content\n"Acme, Inc. expands","Offices in Paris, Berlin"'

    assert decode(text) == [{"Title": "Acme, Inc. expands", "Content": "Offices in Paris, Berlin"}]


def test_header_cells_are_trimmed_and_unquoted():
    rows = decode('"Title" , "Published Date"\nA,2024-01-01')

    assert list(rows[0]) == ["Title", "Published Date"]


def test_rows_with_wrong_field_count_are_dropped():
    text = "a,b,c\n1,2,3\n1,2\n1,2,3,4\n4,5,6"

    rows = decode(text)

    assert rows == [{"a": "1", "b": "2", "c": "3"}, {"a": "4", "b": "5", "c": "6"}]
    assert len(rows) <= 4


def test_blank_lines_and_carriage_returns_are_ignored():
    text = "a,b\r\n1,2\r\n\r\n   \n3,4\r\n"

    assert decode(text) == [{"a": "1", "b": "2"}, {"a": "3", "b": "4"}]


def test_inputs_without_data_rows_decode_to_nothing():
    assert decode("") == []
    assert decode("headeronly") == []
    assert decode(None) == []


def test_split_line_trims_fields_and_flushes_last_one():
    assert split_line(' a , "b" ,c') == ["a", "b", "c"]
    assert split_line("a,") == ["a", ""]
