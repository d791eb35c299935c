# gst_billing/utils/__init__.py
