"""Chat Insights: conversation reconstruction and chat volume analytics."""
