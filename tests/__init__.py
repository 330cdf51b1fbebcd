#!/usr/bin/env python

"""registry_transfer_async tests."""
