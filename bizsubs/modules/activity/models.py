# Supabase table: activity_logs
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- user_email: text (not null)
- action_type: text ('create' | 'update' | 'delete')
- resource_type: text (not null) - subscription, lifetime_deal, client, project, team_member, workspace
- resource_id: uuid (nullable)
- description: text (not null)
- timestamp: timestamp (default: now())
"""
