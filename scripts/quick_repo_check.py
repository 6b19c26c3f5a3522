from hotelcatalog.search.catalog import CatalogService

svc = CatalogService()
for term, max_price in [("", None), ("villa", None), ("Kuala Lumpur, Malaysia", 200)]:
    page = svc.catalog(search_term=term, max_price=max_price, guests=2)
    print(repr(term), max_price, "→", page.total_count, "room types")
    for x in page.items:
        print("  ", x.room_type_id, x.name, x.base_price, "free", page.available_rooms[x.room_type_id])
