"""
Error handling utilities for the metabox admin screen.
Provides user-friendly messages and technical details for failures that
reach the host screen.
"""

import streamlit as st
import logging
import traceback
from typing import Optional

from .exceptions import MetaboxError, SchemaError, UnknownFieldType

logger = logging.getLogger(__name__)


class ErrorType:
    """Error type constants."""
    SCHEMA = "schema"
    PERMISSION = "permission"
    STORAGE = "storage"
    USER_INPUT = "user_input"
    SYSTEM = "system"


class ErrorHandler:
    """Error surfacing for the admin screen."""

    @staticmethod
    def handle_error(
        error: Exception,
        context: str,
        error_type: str = ErrorType.SYSTEM,
        user_message: Optional[str] = None,
        show_details: bool = False
    ) -> None:
        """
        Log an error and show it to the user.

        Args:
            error: The exception that occurred
            context: Context where the error occurred
            error_type: Type of error (from ErrorType constants)
            user_message: Custom user-friendly message
            show_details: Whether to expand technical details
        """
        logger.error(f"Error in {context}: {str(error)}", exc_info=True)

        if not user_message:
            user_message = ErrorHandler._get_user_friendly_message(error, error_type)

        ErrorHandler._display_error(user_message, error, context, show_details)

    @staticmethod
    def _get_user_friendly_message(error: Exception, error_type: str) -> str:
        """Generate user-friendly error messages based on error type."""
        error_messages = {
            ErrorType.SCHEMA: {
                UnknownFieldType: "📋 This panel uses a field type that is not available. Please check the panel schema.",
                SchemaError: "📋 The panel schema could not be loaded. Please check the schema file.",
                "default": "📋 Schema error occurred. Please check your panel schema."
            },
            ErrorType.PERMISSION: {
                PermissionError: "🔐 You don't have permission to perform this action.",
                "default": "🔐 Permission denied. Please contact your administrator."
            },
            ErrorType.STORAGE: {
                PermissionError: "🔒 The data store is not writable. Please check file permissions.",
                OSError: "💾 The data store could not be accessed. Please try again.",
                "default": "💾 A storage error occurred. Please try again."
            },
            ErrorType.USER_INPUT: {
                ValueError: "⚠️ Invalid input provided. Please check your data and try again.",
                "default": "⚠️ Input error. Please review your data and try again."
            },
            ErrorType.SYSTEM: {
                MetaboxError: "💻 The panel could not be displayed. Please contact support.",
                "default": "💻 System error occurred. Please try again or contact support."
            }
        }

        error_type_messages = error_messages.get(error_type, error_messages[ErrorType.SYSTEM])

        for exception_type, message in error_type_messages.items():
            if exception_type != "default" and isinstance(error, exception_type):
                return message

        return error_type_messages.get("default", "An unexpected error occurred.")

    @staticmethod
    def _display_error(
        user_message: str,
        error: Exception,
        context: str,
        show_details: bool = False
    ) -> None:
        """Display error message to user with technical details."""
        st.error(user_message)

        with st.expander("🔍 Technical Details", expanded=show_details):
            st.write(f"**Error Type:** {type(error).__name__}")
            st.write(f"**Context:** {context}")
            st.write(f"**Error Message:** {str(error)}")

            if isinstance(error, MetaboxError) and error.recovery_suggestions:
                st.write("**Suggested Actions:**")
                for suggestion in error.recovery_suggestions:
                    st.write(f"• {suggestion}")

            st.code("".join(traceback.format_exception(type(error), error, error.__traceback__)))
