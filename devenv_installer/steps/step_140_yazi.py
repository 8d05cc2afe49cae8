from __future__ import annotations

from .base import PackageGroupStep


class YaziStep(PackageGroupStep):
    # Packaged by Fedora; the upstream zip release is not needed here.
    step_id = "140_yazi"
    label = "Installing Yazi file manager"
    group = "yazi"
