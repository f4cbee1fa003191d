import argparse
import json
import logging

import pytest

from conftest import FAKE_SIGNATURE, read_archive
from passbook import cli
from passbook.core.config import get_settings
from passbook.core.container import get_container


@pytest.fixture(autouse=True)
def isolated_logging_and_settings():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    get_settings.cache_clear()
    get_container.cache_clear()
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    get_settings.cache_clear()
    get_container.cache_clear()


@pytest.fixture
def fields_file(tmp_path, coupon_fields):
    path = tmp_path / "fields.json"
    path.write_text(json.dumps(coupon_fields), encoding="utf-8")
    return path


def _argv(fields_file, credentials, script, output, *extra):
    return [
        "--style",
        "coupon",
        "--fields",
        str(fields_file),
        "--signer-cert",
        credentials["signer_cert"],
        "--ca-cert",
        credentials["ca_cert"],
        "--passphrase",
        credentials["passphrase"],
        "--openssl",
        str(script),
        "--output",
        str(output),
        *extra,
    ]


def test_generates_bundle(tmp_path, fields_file, credentials, fake_openssl, icon_path, icon_bytes):
    output = tmp_path / "out" / "coupon.pkpass"
    argv = _argv(fields_file, credentials, fake_openssl(), output, "--image", f"icon={icon_path}")

    assert cli.main(argv) == 0

    entries = read_archive(output.read_bytes())
    assert sorted(entries) == ["icon.png", "manifest.json", "pass.json", "signature"]
    assert entries["icon.png"] == icon_bytes
    assert entries["signature"] == FAKE_SIGNATURE


def test_signing_failure_leaves_no_output(tmp_path, fields_file, credentials, fake_openssl):
    output = tmp_path / "coupon.pkpass"
    argv = _argv(fields_file, credentials, fake_openssl(stderr="bad decrypt"), output)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)

    assert "pass generation failed" in str(excinfo.value.code)
    assert "bad decrypt" in str(excinfo.value.code)
    assert not output.exists()


def test_validation_failure_is_reported(tmp_path, coupon_fields, credentials, fake_openssl):
    del coupon_fields["teamIdentifier"]
    fields_file = tmp_path / "fields.json"
    fields_file.write_text(json.dumps(coupon_fields), encoding="utf-8")

    with pytest.raises(SystemExit, match="teamIdentifier is required"):
        cli.main(_argv(fields_file, credentials, fake_openssl(), tmp_path / "coupon.pkpass"))


def test_unknown_image_name_is_an_argument_error(tmp_path, fields_file, credentials, fake_openssl):
    argv = _argv(fields_file, credentials, fake_openssl(), tmp_path / "x.pkpass", "--image", "banner=b.png")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)
    assert excinfo.value.code == 2


def test_missing_fields_file(tmp_path, credentials, fake_openssl):
    argv = _argv(tmp_path / "absent.json", credentials, fake_openssl(), tmp_path / "x.pkpass")

    with pytest.raises(SystemExit, match="fields file not found"):
        cli.main(argv)


def test_fields_file_must_hold_an_object(tmp_path, credentials, fake_openssl):
    path = tmp_path / "fields.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(SystemExit, match="JSON object"):
        cli.main(_argv(path, credentials, fake_openssl(), tmp_path / "x.pkpass"))


@pytest.mark.parametrize("value", ["icon", "=icon.png", "icon="])
def test_parse_image_rejects_malformed_values(value):
    with pytest.raises(argparse.ArgumentTypeError):
        cli.parse_image(value)


def test_parse_image():
    name, path = cli.parse_image("logo2x=assets/logo@2x.png")
    assert name == "logo2x"
    assert path.name == "logo@2x.png"
