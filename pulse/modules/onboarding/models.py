# Supabase table: user_onboarding
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure (one row per profile):
- id: uuid (primary key)
- user_id: text (unique, references profiles.id)
- onboarding_completed: boolean (default: false) - core module
- agent_onboarding_completed: boolean (default: false) - agents module
- call_center_onboarding_completed: boolean (default: false) - callcenter module
- profile_completed: boolean (default: false)
- onboarding_completion_date: timestamp (nullable) - set when core completes
- completed_steps: text[] (default: '{}') - step ids in completion order
- step_data: jsonb (default: '{}') - payload handed to advance, keyed by step id
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Module flags are monotonic: once true they are never written back to false.
"""
