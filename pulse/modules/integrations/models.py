# Supabase table: external_service_connections
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: text (references profiles.id)
- service_name: text - google_workspace, crm, twilio, ...
- connection_status: text - connected, disconnected, error
- connected_at: timestamp (nullable)
- metadata: jsonb (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
