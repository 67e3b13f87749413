# SPDX-License-Identifier: Apache-2.0

"""
Middleware package for request processing.

This package contains middleware components for error rendering, CSRF
protection, CORS and request validation in the Membership API.
"""
