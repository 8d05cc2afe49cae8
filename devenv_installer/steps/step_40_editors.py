from __future__ import annotations

from .base import PackageGroupStep


class EditorsStep(PackageGroupStep):
    step_id = "40_editors"
    label = "Installing editors"
    group = "editors"
