from __future__ import annotations

import copy
import logging
from typing import Any, Optional

from lumedit.core.settings import EditorSettings, resolve_settings
from lumedit.core.units import UnitsLike
from lumedit.derived.metrics import calculate_properties
from lumedit.export.ies_writer import generate_ies_text
from lumedit.models.derived import DerivedProperties
from lumedit.models.document import (
    DIMENSIONS,
    IESDocument,
    IESMetadata,
    PhotometricData,
    merge_metadata,
    opening_field,
)
from lumedit.parser.ies_parser import parse_ies_text
from lumedit.photometry import scaling
from lumedit.photometry.scaling import PreconditionError


logger = logging.getLogger(__name__)


class IESFile:
    """
    Stateful wrapper around one IESDocument.

    Every mutation goes through the scaling functions, which hand back a new
    document; the wrapper only rebinds its reference.
    """

    def __init__(self, document: IESDocument, settings: Optional[EditorSettings] = None) -> None:
        self._doc = document
        self._settings = resolve_settings(settings)

    @classmethod
    def parse(cls, text: str, file_name: str = "", settings: Optional[EditorSettings] = None) -> "IESFile":
        return cls(parse_ies_text(text, file_name), settings=settings)

    @classmethod
    def from_document(cls, document: IESDocument, settings: Optional[EditorSettings] = None) -> "IESFile":
        return cls(copy.deepcopy(document), settings=settings)

    @property
    def document(self) -> IESDocument:
        return self._doc

    @property
    def metadata(self) -> IESMetadata:
        return self._doc.metadata

    @property
    def photometric_data(self) -> PhotometricData:
        return self._doc.photometric_data

    @property
    def file_name(self) -> str:
        return self._doc.file_name

    @file_name.setter
    def file_name(self, name: str) -> None:
        self._doc.file_name = name

    @property
    def settings(self) -> EditorSettings:
        return self._settings

    def replace_document(self, document: IESDocument) -> None:
        """Swap in a document built elsewhere (e.g. on a copy of this file)."""
        self._doc = document

    def copy(self, file_name: Optional[str] = None) -> "IESFile":
        dup = IESFile(copy.deepcopy(self._doc), settings=self._settings)
        if file_name:
            dup.file_name = file_name
        return dup

    def properties(self) -> DerivedProperties:
        return calculate_properties(self._doc.photometric_data)

    def update_metadata(self, **updates: Any) -> None:
        """Overwrite only the fields supplied; `None` means leave as is."""
        try:
            merged = merge_metadata(self._doc.metadata, **updates)
        except KeyError as e:
            raise PreconditionError(str(e.args[0]) if e.args else str(e)) from e
        self._doc = IESDocument(
            file_name=self._doc.file_name,
            metadata=merged,
            photometric_data=self._doc.photometric_data,
        )

    def update_wattage(self, new_watts: float, update_lumens: bool = True) -> None:
        if update_lumens:
            self._doc = scaling.scale_by_wattage(self._doc, new_watts)
            return
        scaling.require_positive(new_watts, "input watts")
        doc = copy.deepcopy(self._doc)
        doc.photometric_data.input_watts = float(new_watts)
        self._doc = doc

    def update_lumens(self, new_lumens: float, update_wattage: bool = True) -> None:
        self._doc = scaling.scale_by_lumens(self._doc, new_lumens, adjust_wattage=update_wattage)

    def update_dimensions(
        self,
        length: Optional[float] = None,
        width: Optional[float] = None,
        height: Optional[float] = None,
        *,
        scale_wattage: bool = False,
    ) -> None:
        """
        Rescale for new luminous-opening dimensions, at most one pass per axis
        in the order length, width, height. Values within the dimension
        tolerance of the current one do not rescale.
        """
        tol = self._settings.dimension_tolerance
        proposed = {"length": length, "width": width, "height": height}
        doc = self._doc
        for which in DIMENSIONS:
            value = proposed[which]
            if value is None:
                continue
            current = doc.photometric_data.dimension(which)
            if abs(current - float(value)) > tol:
                doc = scaling.scale_by_dimension(doc, value, which, scale_wattage=scale_wattage)
            else:
                logger.debug("update_dimensions %s: %s unchanged (%g ~ %g)", doc.file_name, which, current, value)

        doc = copy.deepcopy(doc) if doc is self._doc else doc
        for which in DIMENSIONS:
            value = proposed[which]
            if value is None:
                continue
            setattr(doc.photometric_data, which, float(value))
            setattr(doc.metadata, opening_field(which), float(value))
        self._doc = doc

    def convert_units(self, target: UnitsLike) -> None:
        self._doc = scaling.convert_units(self._doc, target, settings=self._settings)

    def scale_by_cct(self, multiplier: float) -> None:
        self._doc = scaling.scale_by_cct(self._doc, multiplier)

    def efficacy(self) -> float:
        data = self._doc.photometric_data
        return scaling.calculate_efficacy(data.total_lumens, data.input_watts)

    def write(self) -> str:
        return generate_ies_text(self._doc, settings=self._settings)

    def __repr__(self) -> str:
        data = self._doc.photometric_data
        return (
            f"IESFile({self._doc.file_name!r}, {data.total_lumens:g} lm, "
            f"{data.input_watts:g} W, {data.number_of_horizontal_angles}x{data.number_of_vertical_angles})"
        )
