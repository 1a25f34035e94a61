# Bulk import writes into any entities.tables.Table member
# This file documents the row conventions the importer fills in
# Actual operations are handled via Supabase SDK in service.py

"""
System fields added to every imported row:
- id: uuid4 when the CSV does not supply one (profiles: the caller's id)
- user_id: always the caller for owned tables; a mapped user_id column is overwritten
- created_at / updated_at: from created_date / updated_date columns, else now

agent_voices rows fold previewAudioUrl / isActive into voice_settings (jsonb).
call_logs rows fold conversationId, callSid, campaignName, transcript,
analysis and formData into metadata (jsonb).
"""
