# Supabase table: business_plans
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure (one row per user, superseded on every save):
- id: uuid (primary key)
- user_id: text (unique, references profiles.id)
- plan_year: integer
- annual_gci_goal: numeric - gci_required
- average_commission: numeric - gross commission of one average deal
- transactions_needed: integer - total_deals_needed
- conversion_rates: jsonb - {"buyer": {...}, "listing": {...}}
- monthly_breakdown: jsonb - monthly funnel per side
- detailed_plan: jsonb - the full planner inputs, tagged with "version"
- is_active: boolean - true once goals were generated from it
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Activating a plan writes eight annual goals (see ANNUAL_GOALS in service.py)
matched on (user_id, title, goal_type='annual').
"""
