# tests/test_activation.py
import json
import re

import pytest

from retail_pos.constants import DEFAULT_ACTIVATION_SECRET
from retail_pos.errors import ValidationError
from retail_pos.modules.activation import ActivationStore, generate_key, validate_key

SECRET = DEFAULT_ACTIVATION_SECRET
KNOWN_KEY = "F242-BAA9-F4F4-A333-A82D-2A0A-E15A-F347"


def test_key_matches_known_value():
    assert generate_key("Padaria Central", SECRET) == KNOWN_KEY


def test_key_shape():
    key = generate_key("Mercado Bom Preço", SECRET)
    assert re.fullmatch(r"([0-9A-F]{4}-){7}[0-9A-F]{4}", key)


def test_name_is_trimmed_and_case_folded():
    assert generate_key("  padaria central ", SECRET) == KNOWN_KEY


def test_secret_changes_key():
    assert generate_key("Padaria Central", "outro-segredo") != KNOWN_KEY


def test_validate_key_tolerates_case_and_spaces():
    assert validate_key(KNOWN_KEY.lower(), "Padaria Central", SECRET)
    assert validate_key(" " + KNOWN_KEY + " ", "Padaria Central", SECRET)
    assert not validate_key(KNOWN_KEY, "Padaria Norte", SECRET)
    assert not validate_key("", "Padaria Central", SECRET)
    assert not validate_key(KNOWN_KEY, "", SECRET)


def test_empty_name_cannot_get_a_key():
    with pytest.raises(ValidationError):
        generate_key("   ", SECRET)


def test_activation_store_roundtrip(tmp_path):
    st = ActivationStore(tmp_path / "activation.json", SECRET)
    assert st.is_activated() is False

    state = st.activate("Padaria Central", KNOWN_KEY.lower())
    assert state.activated and state.key == KNOWN_KEY
    assert st.is_activated() is True


def test_bad_key_is_not_persisted(tmp_path):
    path = tmp_path / "activation.json"
    st = ActivationStore(path, SECRET)
    with pytest.raises(ValidationError):
        st.activate("Padaria Central", "0000-0000")
    assert not path.exists()


def test_edited_file_does_not_activate(tmp_path):
    path = tmp_path / "activation.json"
    path.write_text(json.dumps({"activated": True, "client_name": "Outra Loja", "key": KNOWN_KEY}))
    assert ActivationStore(path, SECRET).is_activated() is False


def test_corrupt_file_means_not_activated(tmp_path):
    path = tmp_path / "activation.json"
    path.write_text("{not json")
    assert ActivationStore(path, SECRET).is_activated() is False
