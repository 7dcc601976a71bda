"""Contains a specialized PyQt widget class for integer input."""

from __future__ import annotations

from PyQt6 import QtCore as qtc
from PyQt6 import QtWidgets as qtw


class IntSpinBox(qtw.QSpinBox):
    """A QSpinBox that signals committed changes and can represent 'no value'.

    The custom 'value_change_commited' signal is only emitted when the user finishes editing and the value differs from
    the last committed one. If a special value text is given, the lowest value of the range is shown as that text and
    'optional_value()' returns None for it (e.g. a seed input where 'Random' means no fixed seed).

    Signals:
        value_change_commited: Emitted when the user finishes editing and the value has changed since the last commit.
    """

    value_change_commited = qtc.pyqtSignal(int)

    # The last successfully committed int value, used to determine if a change is meaningful.
    _last_value: int
    # True if the lowest value of the range stands for 'no value'.
    _has_special_value: bool

    def __init__(
        self,
        default_value: int,
        min_value: int,
        max_value: int,
        step_size: int,
        special_value_text: str | None = None,
    ) -> None:
        """Initializes the specialized integer spin box.

        Args:
            default_value: The initial value displayed by the spin box.
            min_value: The lowest integer value allowed in the spin box.
            max_value: The highest integer value allowed in the spin box.
            step_size: The amount to increase or decrease the value by when using the up/down arrow buttons.
            special_value_text: If given, one more value below min_value is added to the range and displayed as this
                text. Defaults to None.
        """
        super().__init__()

        self._has_special_value = special_value_text is not None
        if special_value_text is not None:
            min_value -= 1
            self.setSpecialValueText(special_value_text)

        self._last_value = default_value

        self.setRange(min_value, max_value)
        self.setValue(default_value)
        self.setSingleStep(step_size)
        self.setCorrectionMode(qtw.QAbstractSpinBox.CorrectionMode.CorrectToNearestValue)
        self.editingFinished.connect(self.on_editing_finished)

    def optional_value(self) -> int | None:
        """Returns the current value, or None if the special value is selected."""
        if self._has_special_value and self.value() == self.minimum():
            return None
        return self.value()

    def on_editing_finished(self) -> None:
        """Emits 'value_change_commited' if the value differs from the last committed one."""
        if self._last_value != self.value():
            self._last_value = self.value()
            self.value_change_commited.emit(self.value())
