"""
One-time passcodes used as a second authentication factor.

A code is issued to a user after their primary credential check, delivered
over email or SMS and verified at most once before it expires.
"""

from passcode.core.mfa.dispatcher import DeliveryDispatcher
from passcode.core.mfa.service import MfaService
from passcode.core.mfa.store import PasscodeStore

__all__ = ['DeliveryDispatcher', 'MfaService', 'PasscodeStore']
