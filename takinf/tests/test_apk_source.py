# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import logging
import zipfile
from pathlib import Path

import pytest
from androguard.core.apk import APK
from lxml import etree

from takinf.apk_source import AndroguardSource, node_from_element, open_source
from takinf.reader import read_apk

ICON_BYTES = b"\x89PNG\r\n\x1a\n" + b"icon" * 64


def _write_zip(path: Path) -> Path:
	"""A well-formed zip with no AndroidManifest.xml; androguard opens it."""
	with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
		zf.writestr("res/mipmap-hdpi/ic_launcher.png", ICON_BYTES)
	return path


def _source_over(apk: APK) -> AndroguardSource:
	src = AndroguardSource.__new__(AndroguardSource)
	src._apk = apk
	src._arsc = None
	return src


def test_close_releases_apkinspector_buffer(tmp_path: Path) -> None:
	apk = APK(str(_write_zip(tmp_path / "plain.apk")))
	stream = apk.zip.zip
	src = _source_over(apk)

	src.close()
	assert stream.closed
	# Second close is a no-op.
	src.close()


def test_extract_and_resolve_on_real_apk(tmp_path: Path) -> None:
	src = _source_over(APK(str(_write_zip(tmp_path / "plain.apk"))))
	try:
		assert src.extract("res/mipmap-hdpi/ic_launcher.png") == ICON_BYTES
		# No resources.arsc in the archive, so references resolve to nothing.
		assert src.resolve("@7F010000") == []
		assert src.resolve("literal") == []
	finally:
		src.close()


def test_open_without_manifest_fails_cleanly(tmp_path: Path) -> None:
	with pytest.raises(ValueError, match="manifest has no package name"):
		open_source(_write_zip(tmp_path / "nomanifest.apk"))


def test_read_apk_skips_real_apk_without_manifest(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
	apk = _write_zip(tmp_path / "nomanifest.apk")
	with caplog.at_level(logging.ERROR):
		assert read_apk(apk) is None
	assert "manifest has no package name" in caplog.text


def test_read_apk_skips_non_zip(tmp_path: Path) -> None:
	bad = tmp_path / "garbage.apk"
	bad.write_bytes(b"not a zip at all")
	assert read_apk(bad) is None


def test_node_from_element_strips_namespaces_and_skips_comments() -> None:
	xml = b"""<manifest xmlns:android="http://schemas.android.com/apk/res/android" package="com.example.app">
	<!-- build comment -->
	<uses-sdk android:minSdkVersion="21" android:targetSdkVersion="33"/>
	<application android:label="@7F010000" android:icon="@7F030000">
		<meta-data android:name="app_desc" android:value="Hello"/>
		<meta-data android:name="other" android:value="x"/>
	</application>
</manifest>"""
	root = node_from_element(etree.fromstring(xml))

	assert root.tag == "manifest"
	assert root.attr("package") == "com.example.app"
	assert set(root.children) == {"uses-sdk", "application"}
	assert root.child("uses-sdk").attr("minSdkVersion") == "21"
	app = root.child("application")
	assert app.attributes == {"label": "@7F010000", "icon": "@7F030000"}
	assert [m.attr("name") for m in app.children["meta-data"]] == ["app_desc", "other"]
	assert root.child("application", 1) is None
	assert root.child("permission") is None
