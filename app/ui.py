# Run from project root: streamlit run app/ui.py
# UI talks to backend API (POST /api/search). Start the API first: uvicorn app.main:app

import os
import sys
from pathlib import Path

# Ensure project root is on path (Streamlit may run with cwd != project root)
_root_from_file = Path(__file__).resolve().parent.parent
_cwd = os.getcwd()
for _root in (_root_from_file, _cwd):
    _root = str(_root)
    if _root not in sys.path:
        sys.path.insert(0, _root)

import streamlit as st

from app.ui_client import FoodSearchClientError, search_food

st.title("Is it safe during pregnancy?")
st.caption("Type a food to see whether it is considered safe to eat while pregnant.")

with st.form("food_search"):
    query = st.text_input("Food", placeholder="e.g. salmon, brie, sushi", max_chars=100)
    submitted = st.form_submit_button("Search")

if submitted and query.strip():
    with st.spinner("Checking..."):
        try:
            st.session_state.last_result = search_food(query)
            st.session_state.last_error = None
        except FoodSearchClientError as e:
            st.session_state.last_result = None
            st.session_state.last_error = e.message
elif submitted:
    st.warning("Please enter a food name.")

if st.session_state.get("last_error"):
    st.error(st.session_state.last_error)

result = st.session_state.get("last_result")
if result:
    food = result["data"]
    st.subheader(food.get("name", ""))
    if food.get("isSafe"):
        st.success("Generally considered safe")
    else:
        st.error("Not recommended")
    confidence = float(food.get("confidence") or 0.0)
    st.progress(min(max(confidence, 0.0), 1.0), text=f"Confidence: {confidence * 100:.0f}%")
    st.write(food.get("explanation", ""))
    if food.get("safeQuantity"):
        st.info(f"Safe quantity: {food['safeQuantity']}")
    for label, key in (("Risks", "risks"), ("Benefits", "benefits"), ("Alternatives", "alternatives")):
        items = food.get(key) or []
        if items:
            st.markdown(f"**{label}**")
            st.markdown("\n".join(f"- {item}" for item in items))
    if food.get("sourceUrl"):
        st.markdown(f"Source: [{food['sourceUrl']}]({food['sourceUrl']})")
    meta = result.get("metadata") or {}
    st.caption(f"Answered by {meta.get('model', 'unknown model')} at {meta.get('timestamp', '')}")

st.divider()
st.caption(
    "This information is for general guidance only and is not a substitute for advice from "
    "your doctor or midwife."
)
