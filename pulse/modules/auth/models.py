# Clerk identity + Supabase profiles
# Authentication is handled by Clerk; Supabase only stores profile data.
# Actual operations are handled via Supabase SDK in service.py

"""
Clerk provides:
- Session JWTs (RS256, verified against the instance JWKS)
- /v1/users/{id} - primary email, first/last name, image url
- Svix-signed webhooks for user.created / user.updated / user.deleted

Expected Supabase table structure:

profiles:
- id: text (primary key, equals the Clerk user id, immutable)
- email: text (nullable)
- full_name: text (nullable)
- avatar_url: text (nullable)
- phone: text (nullable)
- brokerage_name: text (nullable)
- license_number: text (nullable)
- specialization: text (nullable)
- years_experience: integer (nullable)
- subscription_tier: text (nullable) - values: Free, Subscriber, Admin
- subscription_status: text (nullable) - values: active, past_due, locked_out
- past_due_start_date: timestamp (nullable)
- has_call_center_addon: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

user_roles:
- id: uuid (primary key)
- user_id: text (foreign key to profiles.id)
- role: app_role enum - values: admin, user

Profiles are created on first sign-in and never deleted by the app.
"""
