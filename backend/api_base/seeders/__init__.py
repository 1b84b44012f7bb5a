# Seeders package init
