# Supabase tables: every member of entities.tables.Table
# This file documents the ownership conventions the relay relies on
# Actual operations are handled via Supabase SDK in service.py

"""
Ownership columns:
- profiles: id (equals the Clerk user id)
- catalogue tables (CATALOGUE_TABLES): none - shared rows managed by admins
- every other table: user_id (text, references profiles.id)

All owned tables are expected to carry id (uuid primary key) and, where
the relay updates them, updated_at (timestamp).
"""
