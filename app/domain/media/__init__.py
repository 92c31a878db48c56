"""Media inventory and booking calendar synchronization"""
