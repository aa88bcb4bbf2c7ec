"""Explicit application state shared by the client flows"""
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Toast:
    type: str  # "success" | "error" | "info"
    message: str


@dataclass
class MessageDialog:
    title: str
    description: str
    primary_label: str = "Okay"
    secondary_label: Optional[str] = None


@dataclass
class AppContext:
    trial_id: Optional[str] = None
    paywall_open: bool = False
    message_dialog: Optional[MessageDialog] = None
    toasts: List[Toast] = field(default_factory=list)

    def add_toast(self, type: str, message: str) -> None:
        self.toasts.append(Toast(type=type, message=message))

    def open_dialog(
        self,
        title: str,
        description: str,
        primary_label: str = "Okay",
        secondary_label: Optional[str] = None,
    ) -> None:
        self.message_dialog = MessageDialog(title, description, primary_label, secondary_label)

    def close_dialog(self) -> None:
        self.message_dialog = None

    def open_paywall(self) -> None:
        self.paywall_open = True

    def close_paywall(self) -> None:
        self.paywall_open = False
