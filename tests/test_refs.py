from openapi_client_runner.refs import DEFAULT_REPLACEMENTS, replace_refs, replace_refs_in_file

LEGACY = '"$ref": "../common/common-schemas.json#/components/schemas/BadRequestDTO"'
LOCAL = '"$ref": "#/components/schemas/BadRequestDTO"'


def test_legacy_pointer_is_rewritten_and_rest_untouched():
    text = '{\n  "400": {\n    "schema": {\n      ' + LEGACY + '\n    }\n  },\n  "x": "  keep\\tme "\n}'

    result = replace_refs(text)

    assert result == text.replace(LEGACY, LOCAL)
    assert LEGACY not in result


def test_every_default_entry_is_applied():
    text = " ".join(old for old, _ in DEFAULT_REPLACEMENTS)

    assert replace_refs(text) == " ".join(new for _, new in DEFAULT_REPLACEMENTS)


def test_no_match_is_a_copy():
    text = '{"$ref": "#/components/schemas/Contact"}'
    assert replace_refs(text) == text


def test_whitespace_variants_are_not_matched():
    text = '"$ref":"../common/common-schemas.json#/components/schemas/BadRequestDTO"'
    assert replace_refs(text) == text


def test_replacements_apply_in_table_order():
    table = [("aa", "b"), ("bb", "c")]
    assert replace_refs("aaaa", table) == "c"


def test_rewrite_file_in_place(tmp_path):
    path = tmp_path / "fixed.json"
    path.write_text("[" + LEGACY + ", " + LEGACY + "]", encoding="utf-8")

    count = replace_refs_in_file(path, path)

    assert count == 2
    assert path.read_text(encoding="utf-8") == "[" + LOCAL + ", " + LOCAL + "]"


def test_rewrite_to_another_file(tmp_path):
    source = tmp_path / "in.json"
    target = tmp_path / "out.json"
    source.write_text("{}", encoding="utf-8")

    assert replace_refs_in_file(source, target) == 0
    assert target.read_text(encoding="utf-8") == "{}"
    assert source.read_text(encoding="utf-8") == "{}"
