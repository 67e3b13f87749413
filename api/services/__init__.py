# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Services package - External integrations and side effects.

Modules here own MongoDB access, CSRF token signing, store health polling
and response envelope formatting.
"""
