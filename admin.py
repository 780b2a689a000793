import os
import sqlite3

import pandas as pd
import streamlit as st

from app.core.config import settings
from app.services.db_service import SQLiteBookingStore

# Page Config
st.set_page_config(
    page_title=f"{settings.BRAND_NAME} Admin",
    page_icon="📅",
    layout="wide"
)

st.title(f"{settings.BRAND_NAME} - Bookings")

def load_data(limit: int):
    if not os.path.exists(settings.DATABASE_PATH):
        return None

    try:
        store = SQLiteBookingStore(settings.DATABASE_PATH)
        return pd.DataFrame(store.list_recent(limit))
    except sqlite3.Error as e:
        st.error(f"Cannot read the bookings table: {e}")
        return None

limit = st.sidebar.number_input("Rows", min_value=10, max_value=5000, value=200, step=50)

if st.button("Refresh"):
    st.rerun()

df = load_data(int(limit))

if df is not None and not df.empty:
    col1, col2 = st.columns(2)
    col1.metric("Bookings shown", len(df))
    col2.metric("Service types", df['service_type'].nunique())

    st.subheader("Newest first")
    st.dataframe(
        df,
        use_container_width=True,
        column_config={
            "id": "ID",
            "created_at": "Received (UTC)",
            "name": "Name",
            "email": "Email",
            "phone": "Phone",
            "address": "Address",
            "service_type": "Service",
            "sqft": st.column_config.NumberColumn("Sq Ft", format="%d"),
            "preferred_date": "Date",
            "preferred_time": "Time",
            "notes": "Notes",
        }
    )
else:
    st.info("No bookings yet, or the database does not exist.")

st.markdown("---")
st.caption(f"Read-only view of {settings.DATABASE_PATH}")
