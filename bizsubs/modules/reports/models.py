# Reports have no table of their own
# They are computed from subscriptions, lifetime_deals, clients, users and user_preferences

"""
Inputs read per report:
- subscriptions: cost, billing_cycle, start_date, next_billing_date, cancelled_date, created_at,
  business_expense, tax_deductible, tax_rate, category, client_id, project_id
- lifetime_deals: original_cost, purchase_date, business_expense, tax_deductible, tax_rate,
  category, client_id, project_id
- clients: active clients only (client cost report)
- users: tax_rate, financial_year_end, currency_preference
- user_preferences: date_format_preference (CSV export)
"""
