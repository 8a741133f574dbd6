"""
Wallet Objects SDK Examples - Runnable samples for the Google Wallet API.

    - wallet_objects.py: Class, object, save link, issuer, permissions and
      batch insert in one linear script
    - common.py: Shared configuration read from the environment

Quick Start::

    export GOOGLE_APPLICATION_CREDENTIALS=/path/to/key.json
    export WALLET_ISSUER_ID=3388000000022141111
    python -m examples.wallet_objects

Set WALLET_OBJECT_TYPE to one of generic, offer, loyalty, giftCard,
eventTicket, flight or transit to run the samples for another pass type.

Note:
    These examples call the live API and create real classes and objects in
    the configured issuer account.
"""
