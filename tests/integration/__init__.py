"""
Integration tests for the submission relay.

These tests use mocked AWS services to run complete SNS-triggered
invocations through the Lambda handler.
"""
