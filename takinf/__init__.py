# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
`takinf`: build TAK update-server files from a folder of APKs.

Pinned boundary:
- APK parsing goes through `takinf.apk_source.ManifestSource` only.
- `product.inf` / `product.infz` formats live in `inf_v0` / `infz_v0`.
"""
