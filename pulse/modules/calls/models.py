# Supabase tables: call_campaigns, call_logs (reads agent_config)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
call_campaigns:
- id: uuid (primary key)
- user_id: text (references profiles.id)
- campaign_name: text (nullable)
- call_type: text (nullable) - e.g. cold_call, follow_up, open_house
- total_contacts: integer
- status: text - active
- created_at: timestamp (default: now())

call_logs (one row per dialed contact):
- id: uuid (primary key)
- user_id: text (references profiles.id)
- contact_name: text (nullable)
- phone_number: text
- call_type: text (nullable)
- status: text - queued, failed
- metadata: jsonb - {campaign_id, campaign_name, email, notes}
- created_at: timestamp (default: now())

agent_config (agent_type = 'sales_agent', written by call-center onboarding):
- eleven_labs_agent_id: text - required before any campaign can run
- settings: jsonb - twilio_phone_number is the default caller id
"""
