"""Client library: identity stores, reconciliation and the user flows"""
from stylesnap.client.api_client import ApiError, StyleSnapApiClient
from stylesnap.client.context import AppContext, MessageDialog, Toast
from stylesnap.client.flows import GenerationFlow, PaymentFlow, UploadedImage, remove_upload
from stylesnap.client.reconciler import TRIAL_ID_KEY, TrialIdReconciler, TrialIdResolution, merge_trial_ids
from stylesnap.client.storage import EmbeddedStore, LocalStorage

__all__ = [
    "ApiError",
    "StyleSnapApiClient",
    "AppContext",
    "MessageDialog",
    "Toast",
    "GenerationFlow",
    "PaymentFlow",
    "UploadedImage",
    "remove_upload",
    "TRIAL_ID_KEY",
    "TrialIdReconciler",
    "TrialIdResolution",
    "merge_trial_ids",
    "EmbeddedStore",
    "LocalStorage",
]
