# gst_billing/presentation/__init__.py
