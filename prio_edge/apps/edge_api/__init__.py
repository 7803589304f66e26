"""HTTP edge API: the Airtable proxy and lead intent scoring endpoints."""
