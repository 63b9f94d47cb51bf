import pytest
import yaml

from glint.payload import PayloadData, load_payload_data


def test_load_xss_mapping(tmp_path):
    path = tmp_path / "payloads.yaml"
    path.write_text("xss:\n  script:\n    - <script>alert(1)</script>\n  attr: onerror\n", encoding="utf-8")
    data = load_payload_data(path)
    assert data.xss == {"script": ["<script>alert(1)</script>"], "attr": "onerror"}


def test_empty_file_gives_empty_payloads(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_payload_data(path) == PayloadData()


def test_missing_xss_key(tmp_path):
    path = tmp_path / "other.yaml"
    path.write_text("sql:\n  a: b\n", encoding="utf-8")
    assert load_payload_data(str(path)).xss == {}


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_payload_data(tmp_path / "absent.yaml")


def test_invalid_yaml_raises(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("xss: [unclosed\n", encoding="utf-8")
    with pytest.raises(yaml.YAMLError):
        load_payload_data(path)


def test_xss_not_mapping_raises(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("xss:\n  - a\n  - b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_payload_data(path)