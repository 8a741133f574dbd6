"""
Metadata utilities for the Wallet Objects SDK.

This module provides the SDK version and the HTTP header used to identify the
Python SDK in requests made to the walletobjects API.

Examples:
    Get SDK version header::

        from wallet_sdk.metadata import Metadata

        header_value = Metadata.get_client_header_val()
        print(f"Client identifier: {header_value}")
        # Output: "wallet-python-sdk/0.1.0"

Note:
    Version information is detected from the installed package metadata.
"""

import importlib.metadata as metadata

# Package name constant for metadata lookup
PACKAGE_NAME = "wallet-objects-sdk"


class Metadata:
    """Utility class for SDK identification headers.

    Constants:
        CLIENT_HEADER: The HTTP header name used for client identification
    """

    # HTTP header name for client identification
    CLIENT_HEADER = "x-goog-api-client"

    @staticmethod
    def get_client_header_val():
        """Generate the client header value for HTTP requests.

        The header format follows the pattern: "wallet-python-sdk/{version}".

        Returns:
            str: Header value in the format "wallet-python-sdk/{version}"

        Raises:
            PackageNotFoundError: If the wallet-objects-sdk package is not
                installed.
        """
        version = metadata.version(PACKAGE_NAME)
        return f"wallet-python-sdk/{version}"
