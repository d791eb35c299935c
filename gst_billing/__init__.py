# gst_billing/__init__.py
