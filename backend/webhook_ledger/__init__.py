"""Verified, idempotent storage and query API for Stripe webhook events"""
