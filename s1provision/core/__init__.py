"""Core Business Logic Module

Provisioning logic for SentinelOne accounts and users, independent of the
command-line interface.

Module Structure:
    - sentinelone/            : SentinelOne management API client and services
    - provisioning_service.py : Account -> user -> password reset workflow
    - records.py              : CSV provisioning record source
    - timestamps.py           : RFC 3339 timestamps and durations
    - validators.py           : Input validation

Usage Pattern:
    Import explicitly when needed:
        from s1provision.core.provisioning_service import ProvisioningService
        from s1provision.core.records import read_account_records
        from s1provision.core.sentinelone import SentinelOneClient
"""
