"""Connectors - remote document service integrations.

This package holds the authentication and HTTP plumbing for the services
archives are written to. The archive pipeline depends on the client
interfaces here and translates connector errors into archive errors.

Currently available:
- sharepoint/: Microsoft Graph (Azure AD client credentials + SharePoint drives)
"""
